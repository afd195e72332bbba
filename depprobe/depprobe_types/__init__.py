"""Models and exceptions shared across depprobe"""
