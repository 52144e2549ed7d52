GET_RSVP_URL = "/rsvp/{token}"
UPDATE_RSVP_URL = "/rsvp/{token}"
