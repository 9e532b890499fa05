class BookingError(Exception):
    """A booking request the practice cannot accept, with a user-facing reason."""
    status_code = 422
    message = "Não foi possível concluir o agendamento."

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class DayClosedError(BookingError):
    message = "Não atendemos neste dia. Por favor, escolha outro dia."


class BookingsClosedError(BookingError):
    """The administrator closed online booking for the whole month."""
    message = "Desculpe, não estamos a aceitar agendamentos neste momento."


class LastStartExceededError(BookingError):
    def __init__(self, last_start: str):
        self.last_start = last_start
        super().__init__(f"O último horário permitido para início é {last_start}.")


class ClosingTimeExceededError(BookingError):
    def __init__(self, closing: str):
        self.closing = closing
        super().__init__(
            f"Este serviço ultrapassa o horário de funcionamento (fecho às {closing})."
        )


class SlotConflictError(BookingError):
    # Deliberately generic: never say whose appointment is in the way.
    status_code = 409
    message = "Horário ocupado. Este horário conflita com outro agendamento existente."


class SlotNoLongerAvailableError(BookingError):
    """Another booking for the same slot was written first."""
    status_code = 409
    message = "Este horário já não está disponível. Por favor, escolha outro e tente novamente."


class AppointmentNotFoundError(Exception):
    def __init__(self, appointment_id):
        self.appointment_id = appointment_id
        super().__init__(f"Appointment {appointment_id} not found")
