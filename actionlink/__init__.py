"""
ActionLink

Short shareable links for blockchain payment actions (tips and fixed-price
NFT purchases): creation, resolution, transaction building and execution
tracking.
"""

__version__ = "1.0.0"
