"""Command line entry points for the timebox planner."""
