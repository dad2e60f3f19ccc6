# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/exceptions.py

class RecoveryCalculatorError(Exception):
    """Base exception for all errors raised by the recovery calculator engine."""
    def __init__(self, message="An unspecified error occurred in the recovery calculator."):
        self.message = message
        super().__init__(self.message)


class InvalidInputDataError(RecoveryCalculatorError):
    """Raised when a position or goal value is non-numeric, non-finite or outside its domain."""
    def __init__(self, message="Invalid input data provided for recovery calculation."):
        self.message = message
        super().__init__(self.message)
