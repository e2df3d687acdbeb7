"""WheelMate Utilities"""
