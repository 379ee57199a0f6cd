AUTH_TOKEN_KEY = "auth:token:{token}" # session token -> user id (string, TTL set by the auth service)
USER_KEY = "user:{user_id}" # user id -> public profile (hash)

# **Example `user:{id}` hash fields**
# - `username` = display name
# - `created_at` = ISO timestamp
# - `password_hash` = owned by the auth service, never read here
