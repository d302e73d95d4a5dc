class DomainError(Exception):
    """
    Classe base para todos os erros de regra de negócio.

    `message` é legível pelo usuário final (pt-BR); `error` é um código
    opcional e estável que clientes podem usar para ramificar.
    """
    status_code = 500
    default_message = "Erro interno."

    def __init__(self, message: str | None = None, *, error: str | None = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Entidade referenciada não existe."""
    status_code = 404
    default_message = "Registro não encontrado."


class ForbiddenError(DomainError):
    """Papel ou posse insuficientes para a operação."""
    status_code = 403
    default_message = "Acesso negado."


class ValidationError(DomainError):
    """Entrada ausente/malformada ou regra de domínio violada."""
    status_code = 400
    default_message = "Dados inválidos."


class CouponInvalidError(DomainError):
    """
    Cupom desconhecido, desativado, de outro público
    ou fora da janela de validade.
    """
    status_code = 400
    default_message = "Cupom inválido."


class PaymentMismatchError(DomainError):
    """Valor pago difere do preço esperado."""
    status_code = 409
    default_message = "Valor pago não confere com o preço esperado."


class AlreadyPaidError(DomainError):
    """Comissão já está paga."""
    status_code = 409
    default_message = "Comissão já foi paga."


class ConflictError(DomainError):
    """Violação de unicidade que não pode ser tratada como sucesso idempotente."""
    status_code = 409
    default_message = "Registro em conflito com um existente."
