from ._linear_regression import LinearRegression

__all__ = [
    LinearRegression.__name__,
]
