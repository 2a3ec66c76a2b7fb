"""notifications domain"""
