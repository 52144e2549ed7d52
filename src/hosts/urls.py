UPDATE_REMINDERS_URL = "/events/{event_id}/reminders"
SEND_REMINDER_URL = "/events/{event_id}/guests/{guest_id}/remind"
BROADCAST_URL = "/events/{event_id}/broadcast"
SEND_INVITATION_URL = "/events/{event_id}/guests/{guest_id}/invite"
