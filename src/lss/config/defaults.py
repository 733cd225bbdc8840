"""Starter config.toml template written by ``lss init``."""

DEFAULT_TOML = """\
# lss configuration
# Location: <config dir>/lss/config.toml (override with LSS_CONFIG or --config)

# Substrings: any path containing one of these is not scanned.
ignore = [
    "node_modules",
    ".venv",
    "__pycache__",
]

# Findings whose snippet entropy (bits/char) is below this are dropped.
entropy_threshold = 3.5

# Findings whose combined confidence is below this are dropped (0.0 = keep all).
min_confidence = 0.0

# include_tags = ["credential"]   # keep only findings with one of these tags
# exclude_tags = ["public"]       # drop findings with any of these tags

# Extra rule files (Name::Pattern::tags::confidence per line, or YAML).
# rules_files = ["~/.config/lss/rules.txt"]

# workers = 8                     # default: executor default
# history = true                  # scan git history of nested repositories
# max_file_size_kb = 1024         # skip larger files (default: no limit)
"""
