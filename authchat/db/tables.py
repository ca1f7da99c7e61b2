SCHEMA_VERSION_TABLE = """CREATE TABLE IF NOT EXISTS schema_version
(
    version    INTEGER   NOT NULL PRIMARY KEY,
    name       TEXT      NOT NULL,
    applied_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

USERS_TABLE = """CREATE TABLE IF NOT EXISTS users
(
    id         INTEGER  PRIMARY KEY AUTOINCREMENT,
    username   TEXT     NOT NULL UNIQUE,
    email      TEXT     NOT NULL UNIQUE,
    password   TEXT     NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

MESSAGES_TABLE = """CREATE TABLE IF NOT EXISTS messages
(
    id          INTEGER  PRIMARY KEY AUTOINCREMENT,
    sender_id   INTEGER  NOT NULL,
    receiver_id INTEGER  NOT NULL,
    message     TEXT     NOT NULL,
    created_at  DATETIME DEFAULT CURRENT_TIMESTAMP,
    is_read     INTEGER  NOT NULL DEFAULT 0,
    FOREIGN KEY (sender_id) REFERENCES users (id),
    FOREIGN KEY (receiver_id) REFERENCES users (id)
);
"""

USERS_PROFILE_IMAGE_COLUMN = "ALTER TABLE users ADD COLUMN profile_image TEXT"

MESSAGES_REACTION_COLUMN = "ALTER TABLE messages ADD COLUMN reaction TEXT"

MESSAGES_INDEXES = (
    "CREATE INDEX IF NOT EXISTS messages_pair_index ON messages (sender_id, receiver_id)",
    "CREATE INDEX IF NOT EXISTS messages_unread_index ON messages (receiver_id, is_read)",
)
