RUN_REMINDERS_URL = "/cron/reminders"
