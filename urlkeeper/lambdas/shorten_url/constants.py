# Log event codes
METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'
MALFORMED_BODY = 'MALFORMED_BODY'
MISSING_URL = 'MISSING_URL'
INVALID_EXPIRATION_DATE = 'INVALID_EXPIRATION_DATE'
CUSTOM_KEY_CONFLICT = 'CUSTOM_KEY_CONFLICT'
KEY_SPACE_EXHAUSTED = 'KEY_SPACE_EXHAUSTED'
STORAGE_FAILURE = 'STORAGE_FAILURE'
CONFIGURATION_FAILURE = 'CONFIGURATION_FAILURE'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
