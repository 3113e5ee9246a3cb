"""
Signal generators.

Each strategy turns a closing-price series and its parameters into one
BUY/SELL/NONE signal per bar. Generators are looked up by StrategyKind
through `financify.strategies.registry`.
"""
