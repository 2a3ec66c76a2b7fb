"""appointments domain"""
