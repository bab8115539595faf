from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

from sglc.api.utils import sequencers
from sglc.api.utils.sequencers import Prefixos, gerar_numero_sequencial, prefixo_do_tipo
from sglc.core.exceptions import AllocationError
from sglc.models import Licitacao, ProcessoAdministrativo, Sequencia, TipoProcesso

MARCO_2025 = datetime(2025, 3, 10, 14, 0)


def test_prefixo_do_tipo():
    assert prefixo_do_tipo(TipoProcesso.CONTRATO) == "CTR"
    assert prefixo_do_tipo("licitacao") == "LIC"


def test_primeiro_numero_do_mes(db, prefeitura):
    numero = gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
    assert numero == "CTR-2025-03-00001"


def test_numeros_sequenciais_sem_repeticao(db, prefeitura):
    numeros = [
        gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
        for _ in range(5)
    ]
    assert numeros == [f"CTR-2025-03-{n:05d}" for n in range(1, 6)]


def test_contador_inicia_pelo_maior_numero_existente(db, prefeitura):
    db.add(ProcessoAdministrativo(
        prefeitura_id=prefeitura.id,
        numero_processo="CTR-2025-03-00001",
        tipo=TipoProcesso.CONTRATO,
    ))
    db.commit()

    numero = gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
    assert numero == "CTR-2025-03-00002"


def test_escopos_independentes(db, prefeitura, outra_prefeitura):
    assert gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025).endswith("00001")
    assert gerar_numero_sequencial(db, ProcessoAdministrativo, "LIC", prefeitura.id, agora=MARCO_2025).endswith("00001")
    assert gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", outra_prefeitura.id, agora=MARCO_2025).endswith("00001")

    abril = datetime(2025, 4, 1)
    assert gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=abril) == "CTR-2025-04-00001"
    assert db.query(Sequencia).count() == 4


def test_numero_nao_reaproveitado_apos_exclusao(db, prefeitura):
    primeiro = gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
    processo = ProcessoAdministrativo(
        prefeitura_id=prefeitura.id, numero_processo=primeiro, tipo=TipoProcesso.CONTRATO
    )
    db.add(processo)
    db.commit()
    db.delete(processo)
    db.commit()

    segundo = gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
    assert segundo == "CTR-2025-03-00002"


def test_licitacao_numerada_pela_quantidade_do_mes(db, prefeitura):
    for indice, criado_em in enumerate([datetime(2025, 3, 1), datetime(2025, 3, 31, 23, 59), datetime(2025, 2, 28)]):
        db.add(Licitacao(
            prefeitura_id=prefeitura.id,
            numero_protocolo=f"ANTIGO-{indice}",
            modalidade="dispensa",
            objeto="Aquisição de material",
            secretaria="Administração",
            responsavel="João",
            data_abertura=date(2025, 3, 1),
            created_at=criado_em,
        ))
    db.commit()

    protocolo = gerar_numero_sequencial(
        db, Licitacao, Prefixos.LICITACAO, prefeitura.id,
        agora=MARCO_2025, campo="numero_protocolo", por_periodo=True
    )
    assert protocolo == "LIC-2025-03-00003"


def test_falha_do_banco_vira_allocation_error(db, prefeitura, monkeypatch):
    def falhar(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(sequencers, "_buscar_sequencia", falhar)

    with pytest.raises(AllocationError):
        gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura.id, agora=MARCO_2025)
