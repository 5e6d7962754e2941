"""Career Coach backend: profile onboarding and cached industry insights."""
