"""analytics domain"""
