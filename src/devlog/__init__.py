"""DevLog - daily work log, sprints and markdown reports."""
