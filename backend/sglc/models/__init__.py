"""
Models do sistema - Multi-tenant

IMPORTANTE: As tabelas de dados herdam de PrefeituraMixin, que adiciona
prefeitura_id. Isso garante isolamento de dados entre prefeituras.
"""

from sglc.models.base import Base, PrefeituraMixin, TimestampMixin, AuditMixin
from sglc.models.prefeitura import Prefeitura
from sglc.models.usuario import Usuario, TipoUsuario
from sglc.models.sequencia import Sequencia
from sglc.models.processo import ProcessoAdministrativo, TipoProcesso, StatusProcesso
from sglc.models.processo_recursos import (
    ProcessoDocumento,
    ProcessoFinanceiro,
    ProcessoNotaFiscal,
    ProcessoFiscal,
    ProcessoFiscalizacao,
    ProcessoObservacao,
    ProcessoPagamento,
)
from sglc.models.licitacao import Licitacao, ModalidadeLicitacao, StatusLicitacao
from sglc.models.contrato import Contrato, StatusContrato
from sglc.models.historico import ProcessoHistorico, AbaHistorico, AcaoHistorico, EntidadeHistorico

__all__ = [
    "Base",
    "PrefeituraMixin",
    "TimestampMixin",
    "AuditMixin",
    "Prefeitura",
    "Usuario",
    "TipoUsuario",
    "Sequencia",
    "ProcessoAdministrativo",
    "TipoProcesso",
    "StatusProcesso",
    "ProcessoDocumento",
    "ProcessoFinanceiro",
    "ProcessoNotaFiscal",
    "ProcessoFiscal",
    "ProcessoFiscalizacao",
    "ProcessoObservacao",
    "ProcessoPagamento",
    "Licitacao",
    "ModalidadeLicitacao",
    "StatusLicitacao",
    "Contrato",
    "StatusContrato",
    "ProcessoHistorico",
    "AbaHistorico",
    "AcaoHistorico",
    "EntidadeHistorico",
]
