"""
简化模型模块的单元测试
"""

import numpy as np
import pytest

from diffusion_simulation.testing import (
    create_flat_plate,
    create_simple_box,
    create_sawtooth_diffuser,
    print_mesh_info,
    validate_mesh,
    validate_simple_models,
)


class TestFlatPlate:
    """测试平板生成"""

    def test_plate_creation(self):
        """测试基本平板创建"""
        mesh = create_flat_plate(2.0, z=0.5)
        assert mesh.shape == (2, 3, 3)
        np.testing.assert_allclose(mesh[:, :, 2], 0.5)
        assert np.max(np.abs(mesh[:, :, :2])) == 2.0

    def test_plate_validation(self):
        """测试平板网格验证"""
        is_valid, message = validate_mesh(create_flat_plate())
        assert is_valid, f"Plate validation failed: {message}"


class TestSimpleBox:
    """测试简化盒子生成"""

    def test_box_creation(self):
        """测试基本盒子创建"""
        mesh = create_simple_box(center=(0, 0, 0), size=(1, 2, 3))
        assert len(mesh) == 12  # 6 faces * 2 triangles

    def test_box_size(self):
        """测试盒子尺寸"""
        size = (2.0, 4.0, 6.0)
        mesh = create_simple_box(center=(0, 0, 0), size=size)

        # 检查各方向范围
        vertices = mesh.reshape(-1, 3)
        for i, s in enumerate(size):
            coord_range = np.max(vertices[:, i]) - np.min(vertices[:, i])
            assert abs(coord_range - s) < 1e-10

    def test_box_validation(self):
        """测试盒子网格验证"""
        is_valid, message = validate_mesh(create_simple_box())
        assert is_valid, f"Box validation failed: {message}"


class TestSawtoothDiffuser:
    """测试锯齿扩散体生成"""

    @pytest.mark.parametrize("n_teeth", [1, 3, 8])
    def test_triangle_count(self, n_teeth):
        """测试三角形数量"""
        assert len(create_sawtooth_diffuser(n_teeth=n_teeth)) == 4 * n_teeth

    def test_extent(self):
        """测试扩散体范围"""
        mesh = create_sawtooth_diffuser(side_size=1.5, n_teeth=5, tooth_height=0.3)
        vertices = mesh.reshape(-1, 3)
        assert vertices[:, 2].min() == 0.0
        assert vertices[:, 2].max() == pytest.approx(0.3)
        assert np.abs(vertices[:, :2]).max() == pytest.approx(1.5)

    def test_faces_point_up(self):
        """测试所有斜面朝上"""
        mesh = create_sawtooth_diffuser(n_teeth=4)
        normals = np.cross(mesh[:, 0] - mesh[:, 1], mesh[:, 0] - mesh[:, 2])
        assert np.all(normals[:, 2] > 0)

    @pytest.mark.parametrize("kwargs", [{"n_teeth": 0}, {"tooth_height": 0.0}])
    def test_invalid_arguments(self, kwargs):
        """测试非法参数"""
        with pytest.raises(ValueError):
            create_sawtooth_diffuser(**kwargs)


class TestValidation:
    """测试网格验证"""

    def test_wrong_shape(self):
        """测试错误形状"""
        is_valid, message = validate_mesh(np.zeros((2, 4, 3)))
        assert not is_valid
        assert "shape" in message

    def test_nan_values(self):
        """测试NaN值"""
        mesh = create_flat_plate()
        mesh[0, 0, 0] = np.nan
        is_valid, message = validate_mesh(mesh)
        assert not is_valid
        assert "NaN" in message

    def test_degenerate_facets(self):
        """测试退化面片"""
        mesh = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]]])
        is_valid, message = validate_mesh(mesh, "Line")
        assert not is_valid
        assert message == "Line: 1 degenerate facets"

    def test_simple_models_are_valid(self):
        """测试所有简化模型可以构建"""
        success, messages = validate_simple_models()
        assert success, messages
        assert len(messages) == 3

    def test_print_mesh_info(self, capsys):
        """测试打印网格信息"""
        print_mesh_info(create_flat_plate(), "Plate")
        out = capsys.readouterr().out
        assert "Plate Information:" in out
        assert "Triangles: 2" in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
