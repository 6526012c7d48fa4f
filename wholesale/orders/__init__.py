"""Order pricing, assembly and the order HTTP boundary."""
