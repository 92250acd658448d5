FRIENDLY_MESSAGES = {
    "CircuitOpenError": "Service temporarily unavailable. Please try again shortly.",
    "StaleDataError": "This house was changed by another request. Please retry.",
    "IntegrityError": "This record conflicts with existing data.",
    "OperationalError": "Temporary issue while accessing data. Please try again shortly.",
    "ConnectionError": "Unable to reach a required service. Please try again later.",
    "TimeoutError": "The request took too long. Please try again later.",
}

DEFAULT_MESSAGE = "Something went wrong on our end. Please try again."


def get_friendly_message(error: Exception) -> str:
    for cls in type(error).__mro__:
        if cls.__name__ in FRIENDLY_MESSAGES:
            return FRIENDLY_MESSAGES[cls.__name__]
    return DEFAULT_MESSAGE
