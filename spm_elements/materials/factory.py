# 文件: spm_elements/materials/factory.py
"""
材料工厂模块

从属性字典创建材料协作对象。
"""

from typing import Any, Dict, Optional

from .concrete import ConcreteParameters, ConstitutiveModel
from .membrane import Membrane
from .reinforcement import (
    Steel,
    UniaxialReinforcement,
    WebReinforcement,
    WebReinforcementDirection,
)


def _require(name: str, props: Dict[str, Any], *keys: str):
    missing = [k for k in keys if props.get(k) is None]
    if missing:
        raise ValueError(
            f"Material '{name}' missing required parameters: {', '.join(missing)}"
        )
    return [props[k] for k in keys]


class MaterialFactory:
    """
    材料工厂

    Example:
        concrete = MaterialFactory.create_concrete({'fc': 30})
        bars = MaterialFactory.create_uniaxial_reinforcement({
            'number_of_bars': 2, 'bar_diameter': 10, 'fy': 500
        })
        membrane = MaterialFactory.create_membrane(
            {'fc': 30},
            {'x': {'bar_diameter': 8, 'bar_spacing': 100, 'fy': 500}},
            panel_width=100,
        )
    """

    @staticmethod
    def create_concrete(props: Dict[str, Any], name: str = 'Concrete') -> ConcreteParameters:
        """
        Args:
            props: {
                    'fc': float,       # 抗压强度 (必需)
                    'ec': float,       # 峰值压应变 (可选, 默认 -0.002)
                    'ecu': float,      # 极限压应变 (可选, 默认 -0.0035)
                    'ft': float,       # 抗拉强度 (可选)
                    'model': 'mcft' | 'dsfm'
                }

        Raises:
            ValueError: 缺少必需参数或模型名称无效
        """
        fc, = _require(name, props, 'fc')
        return ConcreteParameters(
            strength=float(fc),
            plastic_strain=float(props.get('ec', -0.002)),
            ultimate_strain=float(props.get('ecu', -0.0035)),
            tensile_strength=props.get('ft'),
            model=ConstitutiveModel(props.get('model', 'mcft').lower()),
        )

    @staticmethod
    def create_steel(props: Dict[str, Any], name: str = 'Steel') -> Steel:
        fy, = _require(name, props, 'fy')
        return Steel(
            yield_stress=float(fy),
            elastic_module=float(props.get('Es', 210000.0)),
            ultimate_strain=float(props.get('esu', 0.01)),
        )

    @staticmethod
    def create_uniaxial_reinforcement(props: Dict[str, Any],
                                      name: str = 'Reinforcement') -> UniaxialReinforcement:
        """
        Args:
            props: {'number_of_bars': int, 'bar_diameter': float, 'fy': float, 'Es': float}
        """
        n, phi = _require(name, props, 'number_of_bars', 'bar_diameter')
        return UniaxialReinforcement(int(n), float(phi), MaterialFactory.create_steel(props, name))

    @staticmethod
    def create_web_reinforcement(props: Dict[str, Any], panel_width: float,
                                 name: str = 'WebReinforcement') -> WebReinforcement:
        """
        Args:
            props: {'x': {...}, 'y': {...}}，每个方向:
                {'bar_diameter': float, 'bar_spacing': float, 'fy': float, 'Es': float}
            panel_width: 面板厚度
        """
        directions = {}
        for axis in ('x', 'y'):
            sub = props.get(axis)
            if sub is None:
                directions[axis] = None
                continue
            label = f"{name}.{axis}"
            phi, s = _require(label, sub, 'bar_diameter', 'bar_spacing')
            directions[axis] = WebReinforcementDirection(
                float(phi), float(s), MaterialFactory.create_steel(sub, label), panel_width
            )
        return WebReinforcement(directions['x'], directions['y'])

    @staticmethod
    def create_membrane(concrete_props: Dict[str, Any],
                        reinforcement_props: Optional[Dict[str, Any]] = None,
                        panel_width: float = 0.0) -> Membrane:
        """创建面板积分点"""
        concrete = MaterialFactory.create_concrete(concrete_props)
        reinforcement = None
        if reinforcement_props:
            reinforcement = MaterialFactory.create_web_reinforcement(
                reinforcement_props, panel_width
            )
        return Membrane(concrete, reinforcement)
