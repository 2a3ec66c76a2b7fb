"""Halo Optom backend API"""
