"""
Price data contract and I/O.

Validates price bar series and converts CSV files and DataFrames into
chronological PriceBar lists.
"""
