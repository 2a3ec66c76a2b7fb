"""schedules domain"""
