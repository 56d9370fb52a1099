# Log event codes
MISSING_SHORT_KEY = 'MISSING_SHORT_KEY'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
SHORT_URL_EXPIRED = 'SHORT_URL_EXPIRED'
STORAGE_FAILURE = 'STORAGE_FAILURE'
CONFIGURATION_FAILURE = 'CONFIGURATION_FAILURE'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
