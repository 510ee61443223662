# 文件: spm_elements/__init__.py
"""
SPM 单元核心模块

钢筋混凝土膜结构纵筋-面板法 (Stringer-Panel Method) 的单元:
纵筋 (线弹性/非线性)、面板 (线弹性/非线性)、几何、节点和积分点状态。
"""

# ==============================================================================
# 材料协作对象
# ==============================================================================
from spm_elements.materials import (
    # 混凝土
    ConstitutiveModel,
    ConcreteParameters,
    UniaxialConcrete,
    BiaxialConcrete,

    # 钢筋
    Steel,
    UniaxialReinforcement,
    WebReinforcementDirection,
    WebReinforcement,

    # 膜
    Membrane,
    MembraneResult,
    MembraneState,

    # 工厂
    MaterialFactory,
)

# ==============================================================================
# 单元
# ==============================================================================
from spm_elements.element import BaseElement, ElementModel
from spm_elements.stringer import ForceState, Stringer
from spm_elements.stringer_nonlinear import NonlinearStringer
from spm_elements.panel import Panel
from spm_elements.panel_nonlinear import NonlinearPanel

# ==============================================================================
# 积分点与本构关系
# ==============================================================================
from spm_elements.integration_point import CrackState, IntegrationPoint
from spm_elements.relations import (
    StressStrainRelations,
    MCFTRelations,
    DSFMRelations,
    get_relations,
)

# ==============================================================================
# 其他
# ==============================================================================
from spm_elements.node import Constraint, Node, NodeType
from spm_elements.geometry import Edge, PanelGeometry, StringerGeometry, Vertices
from spm_elements.exceptions import (
    SPMError,
    DegenerateGeometry,
    SingularStiffness,
    NonConvergentMaterialInversion,
)


__all__ = [
    # === 材料 ===
    'ConstitutiveModel',
    'ConcreteParameters',
    'UniaxialConcrete',
    'BiaxialConcrete',
    'Steel',
    'UniaxialReinforcement',
    'WebReinforcementDirection',
    'WebReinforcement',
    'Membrane',
    'MembraneResult',
    'MembraneState',
    'MaterialFactory',

    # === 单元 ===
    'BaseElement',
    'ElementModel',
    'ForceState',
    'Stringer',
    'NonlinearStringer',
    'Panel',
    'NonlinearPanel',

    # === 积分点 ===
    'CrackState',
    'IntegrationPoint',
    'StressStrainRelations',
    'MCFTRelations',
    'DSFMRelations',
    'get_relations',

    # === 其他 ===
    'Constraint',
    'Node',
    'NodeType',
    'Edge',
    'PanelGeometry',
    'StringerGeometry',
    'Vertices',
    'SPMError',
    'DegenerateGeometry',
    'SingularStiffness',
    'NonConvergentMaterialInversion',
]
