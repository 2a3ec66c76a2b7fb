"""payments domain"""
