'''
Error taxonomy of the eigensolver drivers.

Every failure is raised synchronously from the call that detected it. Input
validation failures derive from ValueError, failures reported by the iteration
(protocol violations and nonzero status codes) derive from RuntimeError.

The status tables follow the ARPACK dsaupd / dseupd conventions, which the
reverse-communication primitive in `irlm.py` reproduces.

file    : krylov_eigen/algebra/eigen/errors.py
'''

from enum import Enum
from typing import Optional

# ---------------------------------------------------------------------------------
#! Status tables
# ---------------------------------------------------------------------------------

ADVANCE_STATUS = {
    0       : "Normal exit.",
    1       : "Maximum number of iterations taken. "
              "All possible eigenvalues of OP have been found.",
    3       : "No shifts could be applied during a cycle of the implicitly "
              "restarted Lanczos iteration. One possibility is to increase "
              "the size of NCV relative to NEV.",
    -1      : "N must be positive.",
    -2      : "NEV must be positive.",
    -3      : "NCV must be greater than NEV and less than or equal to N.",
    -4      : "The maximum number of Lanczos update iterations allowed "
              "must be greater than zero.",
    -5      : "WHICH must be one of 'LM', 'SM', 'LA', 'SA' or 'BE'.",
    -7      : "Length of private work array WORKL is not sufficient.",
    -8      : "Error return from the tridiagonal eigenvalue calculation.",
    -9      : "Starting vector is zero.",
    -10     : "Only mode 1 (standard problem, B = I) is supported.",
    -12     : "The shift strategy must be 0 (user shifts) or 1 (exact shifts).",
    -13     : "NEV and WHICH = 'BE' are incompatible.",
    -9999   : "Could not build a Lanczos factorization. "
              "PARAMS.converged returns the size of the current factorization.",
}

EXTRACT_STATUS = {
    0       : "Normal exit.",
    -1      : "N must be positive.",
    -2      : "NEV must be positive.",
    -3      : "NCV must be greater than NEV and less than or equal to N.",
    -5      : "WHICH must be one of 'LM', 'SM', 'LA', 'SA' or 'BE'.",
    -7      : "Length of private work WORKL array is not sufficient.",
    -8      : "Error return from the tridiagonal eigenvalue calculation.",
    -10     : "Only mode 1 (standard problem, B = I) is supported.",
    -12     : "NEV and WHICH = 'BE' are incompatible.",
    -14     : "The iteration did not find any eigenvalues to sufficient accuracy.",
}

def describe_status(info: int, stage: str = 'advance') -> str:
    '''Human readable text for a status code of the given stage.'''
    table = ADVANCE_STATUS if stage == 'advance' else EXTRACT_STATUS
    return table.get(info, f"Unknown {stage} status.")

# ---------------------------------------------------------------------------------
#! Exceptions
# ---------------------------------------------------------------------------------

class EigenErrorMsg(Enum):
    '''
    Enumeration class for eigensolver error messages.
    '''
    NOT_SQUARE          = 201
    NOT_SYMMETRIC       = 202
    NOT_REAL            = 203
    INVALID_NEV         = 204
    INVALID_TOLERANCE   = 205
    INVALID_CRITERION   = 206
    INVALID_START       = 207
    UNSUPPORTED_SIGNAL  = 208
    BAD_OFFSETS         = 209
    ADVANCE_FAILED      = 210
    EXTRACT_FAILED      = 211
    INVALID_MAXITER     = 212

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

class EigenError(Exception):
    '''
    Base class for exceptions raised by the eigensolver drivers.
    '''
    def __init__(self, code: EigenErrorMsg, message: Optional[str] = None):
        self.code       = code
        self.message    = message if message else str(code)
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.__class__.__name__} {self.code.name} ({self.code.value})]: {self.message}"

    def __repr__(self):
        return self.__str__()

class ShapeError(EigenError, ValueError):
    '''The operator is not square.'''

class SymmetryError(EigenError, ValueError):
    '''The operator fails its symmetry check.'''

class InvalidArgument(EigenError, ValueError):
    '''Bad k, tolerance, criterion or starting vector.'''

class ProtocolError(EigenError, RuntimeError):
    '''
    The reverse-communication primitive asked for something the driver does not do.
    '''
    def __init__(self, code: EigenErrorMsg, message: Optional[str] = None, signal: Optional[int] = None):
        self.signal = signal
        super().__init__(code, message)

class SolverError(EigenError, RuntimeError):
    '''
    Nonzero status from the iteration (`stage='advance'`) or the extraction
    (`stage='extract'`). The numeric status is kept in `info`.
    '''
    def __init__(self, info: int, stage: str = 'advance', message: Optional[str] = None):
        self.info   = info
        self.stage  = stage
        code        = EigenErrorMsg.ADVANCE_FAILED if stage == 'advance' else EigenErrorMsg.EXTRACT_FAILED
        if message is None:
            message = f"{stage} status {info}: {describe_status(info, stage)}"
        super().__init__(code, message)

# ---------------------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------------------
