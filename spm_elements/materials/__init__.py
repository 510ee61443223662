# 文件: spm_elements/materials/__init__.py
"""
SPM 材料协作对象

分层架构:
- interfaces.py: 结果数据类和协议
- state.py: 面板积分点状态
- concrete.py: 混凝土参数、单轴/双轴混凝土
- reinforcement.py: 钢材、纵筋钢筋、面板分布钢筋
- membrane.py: 钢筋混凝土膜 (面板积分点)
- factory.py: 材料工厂

使用方法:
    from spm_elements.materials import MaterialFactory

    concrete = MaterialFactory.create_concrete({'fc': 30})
    membrane = MaterialFactory.create_membrane({'fc': 30})
    result = membrane.calculate(strain)
    print(result.stress)       # [σx, σy, τxy]
    print(result.tangent)      # 割线刚度
"""

# 核心接口
from .interfaces import (
    MembraneResult,
    UniaxialMaterial,
    MembraneMaterial,
    strain_transformation_matrix,
    principal_strains,
    principal_stresses,
)

# 状态管理
from .state import MembraneState

# 混凝土
from .concrete import (
    ConstitutiveModel,
    ConcreteParameters,
    UniaxialConcrete,
    BiaxialConcrete,
)

# 钢筋
from .reinforcement import (
    Steel,
    UniaxialReinforcement,
    WebReinforcementDirection,
    WebReinforcement,
)

# 膜
from .membrane import Membrane

# 工厂
from .factory import MaterialFactory


__all__ = [
    # 核心接口
    'MembraneResult',
    'UniaxialMaterial',
    'MembraneMaterial',

    # 辅助函数
    'strain_transformation_matrix',
    'principal_strains',
    'principal_stresses',

    # 状态
    'MembraneState',

    # 混凝土
    'ConstitutiveModel',
    'ConcreteParameters',
    'UniaxialConcrete',
    'BiaxialConcrete',

    # 钢筋
    'Steel',
    'UniaxialReinforcement',
    'WebReinforcementDirection',
    'WebReinforcement',

    # 膜
    'Membrane',

    # 工厂
    'MaterialFactory',
]
