"""
Technical indicators and crossover helpers shared by the strategies.
"""
