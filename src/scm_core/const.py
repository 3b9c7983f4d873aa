ERRORS = {
  "E_NOT_FOUND": "File not found",
  "E_CONTAINER": "Container is not a readable channel list archive",
  "E_CHANNEL_NOT_FOUND": "Channel not found",
  "E_SIZE_MISMATCH": "Store size is not a multiple of its record size",
  "E_UNKNOWN_STORE": "Unknown store name",
}

BACKUP_SUFFIX = ".backup"

# Appended to skipped-row warnings: later rows move up one number.
SKIPPED_ROW_NOTE = "row does not take a channel number"
