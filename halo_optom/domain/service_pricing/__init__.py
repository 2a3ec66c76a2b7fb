"""service pricing domain"""
