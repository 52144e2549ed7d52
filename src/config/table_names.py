from enum import Enum


class TableNames(str, Enum):
    USERS = "users"
    EVENTS = "events"
    GUESTS = "guests"
    ADDITIONAL_GUESTS = "additional_guests"
    CO_HOSTS = "event_co_hosts"
    APP_CONFIG = "app_config"
