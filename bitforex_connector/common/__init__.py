# Shared parsing and symbol helpers
