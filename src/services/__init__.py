"""
Services for TimeCraft.

- timeline: time parsing, lane layout, geometry and per-day views
- schedule_generator: schedule creation and analysis via the Gemini API
- plan_store: saved plans, task completion and transactions
- notifications: upcoming-task reminders
"""
