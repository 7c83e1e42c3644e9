"""
Adaptive fee controller for AMM liquidity pools
"""
