"""Prompt status line: directory, git state, CI/PR status and session telemetry."""
