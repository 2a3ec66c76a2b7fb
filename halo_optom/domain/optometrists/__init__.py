"""optometrists domain"""
