"""Command plugins for the Weather Bot"""
