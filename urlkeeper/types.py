from typing import Any


# API Gateway (Lambda proxy integration) payloads
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]

# Decoded request body fields (url, custom_key, expiration)
type FormFields = dict[str, str]

# Configuration documents
type AppConfig = dict[str, Any]  # full AppConfig document, all functions
type LambdaConfiguration = dict[str, Any]  # one function's section: {<backend>: {...}, 'shortener': {...}}
type ShortenerSettings = dict[str, Any]  # key_length, salt, max_key_attempts, default_expiration_days
