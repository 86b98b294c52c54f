"""
Quiz Simulator - Error Taxonomy
All engine errors are local and recoverable: the raising component leaves its
state untouched, and the presentation layer decides how to surface them.
"""


class QuizError(Exception):
    """Base class for every rejection raised by the quiz core"""


class InvalidTransition(QuizError):
    """Intent issued in a state that forbids it"""

    def __init__(self, intent: str, phase: str, detail: str = ''):
        self.intent = intent
        self.phase = phase
        message = f"Cannot {intent} while {phase}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidOption(QuizError):
    """Selected value is not one of the current question's options"""

    def __init__(self, option: str):
        self.option = option
        super().__init__(f"'{option}' is not an option for the current question")


class UnknownModuleId(QuizError):
    def __init__(self, module_id: str):
        self.module_id = module_id
        super().__init__(f"Unknown module: {module_id}")


class IndexOutOfRange(QuizError):
    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Question index {index} out of range (0-{size - 1})")


class QuestionBankError(QuizError):
    """Static question data failed validation"""


class DegenerateModule(QuestionBankError):
    """Module without questions; it can never be graded"""

    def __init__(self, module_id: str = ''):
        self.module_id = module_id
        if module_id:
            super().__init__(f"Module '{module_id}' has no questions")
        else:
            super().__init__("Cannot score a module with no questions")
