"""Models and indexing services for blocks, transactions, soft forks and the DAO of a NavCoin block explorer."""

__version__ = "0.1.0"