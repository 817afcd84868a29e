"""CharityHub moderation backend: activity audit trail and report review."""
