"""
Rotas de Prefeituras (tenants)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sglc.api.deps import get_db, get_current_user, require_master
from sglc.core.exceptions import ValidationError
from sglc.models.prefeitura import Prefeitura
from sglc.models.usuario import Usuario
from sglc.schemas.comum import RespostaApi, RespostaLista
from sglc.schemas.prefeitura import PrefeituraCreate, PrefeituraResponse

router = APIRouter()


@router.get("/", response_model=RespostaLista[PrefeituraResponse])
def listar_prefeituras(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Master vê todas as prefeituras; demais usuários apenas a própria"""
    query = db.query(Prefeitura)
    if not current_user.is_master:
        query = query.filter(Prefeitura.id == current_user.prefeitura_id)

    prefeituras = query.order_by(Prefeitura.nome).all()
    return {
        "success": True,
        "data": [PrefeituraResponse.model_validate(p) for p in prefeituras]
    }


@router.post("/", response_model=RespostaApi[PrefeituraResponse], status_code=201)
def criar_prefeitura(
    prefeitura: PrefeituraCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_master)
):
    """Cadastrar prefeitura (apenas master)"""
    if db.query(Prefeitura).filter(Prefeitura.cnpj == prefeitura.cnpj).first():
        raise ValidationError("CNPJ já cadastrado")

    db_prefeitura = Prefeitura(**prefeitura.model_dump(), ativo=True)
    db.add(db_prefeitura)
    db.commit()
    db.refresh(db_prefeitura)

    return {
        "success": True,
        "data": PrefeituraResponse.model_validate(db_prefeitura),
        "message": "Prefeitura cadastrada com sucesso"
    }
