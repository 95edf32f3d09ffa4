REDIS_SESSION_KEY = "session:{session_id}" # session id - therapist/client pairing

# **Example `session:{id}` hash fields**
# - `therapist_id` = user id of the session's therapist
# - `client_id` = user id of the session's client
# - `created_at` = ISO timestamp (optional, ignored by the relay)
