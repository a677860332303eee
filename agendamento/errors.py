class SchedulingError(Exception):
    """Base class for booking flow errors."""


class BookingValidationError(SchedulingError, ValueError):
    """Form input rejected. The message is shown to the applicant as is."""


class DuplicateCPF(BookingValidationError):
    def __init__(self, cpf: str):
        self.cpf = cpf
        super().__init__("Este CPF já possui um agendamento.")


class SlotConflict(SchedulingError):
    def __init__(self, date: str, time: str):
        self.date = date
        self.time = time
        super().__init__(f"Horário indisponível: {time} em {date} já foi agendado.")


class SchedulingClosed(SchedulingError):
    def __init__(self):
        super().__init__("O sistema está fora do período de agendamento.")


class BookingPersistenceError(SchedulingError):
    """Neither the remote store nor the local cache accepted the booking."""


class WizardStepError(SchedulingError):
    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Wizard is at step '{actual}', expected '{expected}'")


class AgendaConfigError(SchedulingError, ValueError):
    pass


class AccessDenied(SchedulingError):
    def __init__(self, message: str = "Senha incorreta. Tente novamente."):
        super().__init__(message)
