"""
分子管理 API 路由
"""
from fastapi import APIRouter, Depends, Path, Query
from typing import List
import structlog

from api.dependencies import get_store
from api.metrics import increment_molecule_created
from api.middleware.error_handler import MoleculeNotFoundError
from api.schemas.molecule import (
    MoleculeCreate,
    MoleculeResponse,
    MoleculeGeometryResponse,
)
from core.geometry import compute_geometry
from core.store.memory_store import MoleculeStore

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=MoleculeResponse, response_model_exclude_none=True)
async def create_molecule(
    payload: MoleculeCreate,
    store: MoleculeStore = Depends(get_store),
):
    """
    创建分子

    结构在写入前完成校验:
    - 原子 ID 唯一
    - 化学键引用两个不同且存在的原子
    校验失败返回 400，存储不变。
    """
    structure = payload.structure.to_domain()
    structure.validate()

    molecule = store.create_molecule(
        name=payload.name,
        formula=payload.formula,
        structure=structure,
    )
    increment_molecule_created()
    return MoleculeResponse.from_domain(molecule)


@router.get("", response_model=List[MoleculeResponse], response_model_exclude_none=True)
async def list_molecules(store: MoleculeStore = Depends(get_store)):
    """按创建顺序列出全部分子"""
    return [MoleculeResponse.from_domain(m) for m in store.list_molecules()]


@router.get("/name/{name}", response_model=MoleculeResponse, response_model_exclude_none=True)
async def get_molecule_by_name(
    name: str = Path(..., description="分子名称（大小写不敏感）"),
    store: MoleculeStore = Depends(get_store),
):
    """按名称查找分子"""
    molecule = store.get_molecule_by_name(name)
    if molecule is None:
        raise MoleculeNotFoundError(name)
    return MoleculeResponse.from_domain(molecule)


@router.get("/{molecule_id}", response_model=MoleculeResponse, response_model_exclude_none=True)
async def get_molecule(
    molecule_id: int = Path(..., description="分子 ID"),
    store: MoleculeStore = Depends(get_store),
):
    """获取分子详情"""
    molecule = store.get_molecule(molecule_id)
    if molecule is None:
        raise MoleculeNotFoundError(molecule_id)
    return MoleculeResponse.from_domain(molecule)


@router.get("/{molecule_id}/geometry", response_model=MoleculeGeometryResponse)
async def get_molecule_geometry(
    molecule_id: int = Path(..., description="分子 ID"),
    bond_length_factor: float = Query(1.0, gt=0, alias="bondLengthFactor", description="键长缩放因子"),
    store: MoleculeStore = Depends(get_store),
):
    """
    计算分子的渲染几何

    返回显示坐标、化学键放置、键角弧线和孤对电子位置，
    供不具备几何计算能力的客户端直接绘制。
    """
    molecule = store.get_molecule(molecule_id)
    if molecule is None:
        raise MoleculeNotFoundError(molecule_id)

    geometry = compute_geometry(molecule.structure, bond_length_factor)
    logger.debug(
        "geometry_computed",
        molecule_id=molecule_id,
        bond_length_factor=bond_length_factor,
        n_bonds=len(geometry.bonds),
        n_angles=len(geometry.angles),
    )
    return MoleculeGeometryResponse.model_validate({"moleculeId": molecule.id, **geometry.to_dict()})
