"""chat domain"""
