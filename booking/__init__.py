"""Doctor schedules and patient queue booking for polyclinics."""
