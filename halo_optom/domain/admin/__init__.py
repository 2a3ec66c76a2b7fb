"""admin domain"""
