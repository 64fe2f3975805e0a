"""Constants for omk-installer."""

# Installed tree directory name (inside a project or the home directory)
KIRO_DIR = ".kiro"

# Manifest file (inside the target root)
MANIFEST_FILE = ".omk-manifest.json"

# Suffix for backups written before destructive changes
BACKUP_SUFFIX = ".bak"

# Runtime directories created on install, never managed or removed
RUNTIME_DIRS = ("plans", "notepads")
GITKEEP = ".gitkeep"

# Subdirectories a source package must contain to be considered valid
REQUIRED_SOURCE_DIRS = ("agents", "prompts")

# Permission bits applied to hook scripts
HOOK_MODE = 0o755

# Environment variables
SOURCE_DIR_ENV = "OMK_SOURCE_DIR"
CONFIG_ENV = "OMK_CONFIG"

# User defaults file (relative to home)
USER_CONFIG_PATH = ".omk/config.yaml"

# Version
OMK_VERSION = "0.1.0"
