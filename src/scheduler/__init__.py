"""Scheduler module for periodic race schedule checks and push notifications.

Schedule overview:
  - every 5 min  - Upcoming session check
  - every 2 min  - Keep Racing heartbeat
  - Wed 12:00    - Race weekend ahead reminder
  - Fri 09:00    - Friday race weekend start reminder
"""
