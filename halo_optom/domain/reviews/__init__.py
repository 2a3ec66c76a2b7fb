"""reviews domain"""
