"""
射线追踪模拟流程的单元测试
"""

import math

import pytest

from diffusion_simulation.core.collectors import EnergyCollector, build_collectors
from diffusion_simulation.core.constants import DEFAULT_CONSTANTS
from diffusion_simulation.core.data_classes import RayTracking
from diffusion_simulation.core.generators import PointSpeakerRayFactory
from diffusion_simulation.core.model import Model
from diffusion_simulation.core.simulation import (
    BasicSimulationProperties,
    LinearCollectionRules,
    OriginalCollectionRules,
    SampledPositionTracker,
    SceneManager,
    SimulationProperties,
    Simulator,
    get_collection_rules,
    run_simulation,
)
from diffusion_simulation.core.vectors import Ray, Vec3


FREQUENCY = 1000.0
POLE = 9


@pytest.fixture
def plate():
    return Model.new_reference_model(1.0)


def small_properties(**overrides):
    settings = dict(
        frequencies=[500.0, 1000.0],
        source_power=100.0,
        num_of_collectors=37,
        num_of_rays_along_each_axis=5,
        max_tracking=5,
    )
    settings.update(overrides)
    return SimulationProperties(basic=BasicSimulationProperties(**settings))


class TestBasicSimulationProperties:
    """测试模拟参数校验"""

    def test_valid(self):
        """测试合法参数"""
        basic = BasicSimulationProperties(frequencies=[125, 250], source_power=10.0)
        assert basic.frequencies == [125.0, 250.0]
        assert basic.num_of_collectors == DEFAULT_CONSTANTS.num_collectors
        assert basic.num_of_rays_along_each_axis == DEFAULT_CONSTANTS.population

    def test_collects_all_errors(self):
        """测试一次报告所有错误"""
        with pytest.raises(ValueError) as excinfo:
            BasicSimulationProperties(
                frequencies=[],
                source_power=-1.0,
                num_of_collectors=38,
                num_of_rays_along_each_axis=0,
                max_tracking=0,
                absorption=1.5,
            )
        message = str(excinfo.value)
        assert message.startswith("Error detected in BasicSimulationProperties:")
        for fragment in ("frequencies", "source power", "divisible by 4", "rays along each axis",
                         "max tracking", "absorption"):
            assert fragment in message

    def test_too_few_collectors(self):
        """测试收集器太少"""
        with pytest.raises(ValueError, match="less than 4"):
            BasicSimulationProperties(frequencies=[500], source_power=1.0, num_of_collectors=1)


class TestCollectionRules:
    """测试能量收集规则"""

    def test_lookup(self):
        """测试按名称获取规则"""
        assert isinstance(get_collection_rules("original"), OriginalCollectionRules)
        assert isinstance(get_collection_rules("linear"), LinearCollectionRules)
        with pytest.raises(ValueError, match="Unknown energy collection rules"):
            get_collection_rules("quadratic")

    def test_original_weight(self):
        """测试原始规则收集全部能量"""
        collector = EnergyCollector(Vec3(0.0, 0.0, 4.0), 1.0)
        hit = collector.hit(Ray(Vec3(0.5, 0.0, 0.0), Vec3.Z, 2.0), FREQUENCY)
        OriginalCollectionRules().collect(collector, hit, 0.01)
        assert collector.energy == {0.01: 2.0}

    def test_linear_weight(self):
        """测试线性规则按射线偏离中心的距离衰减"""
        collector = EnergyCollector(Vec3(0.0, 0.0, 4.0), 1.0)
        rules = LinearCollectionRules()
        central = collector.hit(Ray(Vec3.ZERO, Vec3.Z, 2.0), FREQUENCY)
        offset = collector.hit(Ray(Vec3(0.5, 0.0, 0.0), Vec3.Z, 2.0), FREQUENCY)
        assert rules.weight(collector, central) == pytest.approx(1.0)
        assert rules.weight(collector, offset) == pytest.approx(0.5)
        rules.collect(collector, offset, 0.01)
        assert collector.energy[0.01] == pytest.approx(1.0)


class TestSampledPositionTracker:
    """测试射线轨迹采样"""

    def test_sampling_pattern(self):
        """测试均匀采样"""
        tracker = SampledPositionTracker(6, 2)
        sampled = [i for i in range(36) if tracker.is_sampling(i)]
        assert sampled == [0, 3, 18, 21]

    def test_all_rays_sampled(self):
        """测试全部采样"""
        tracker = SampledPositionTracker(3, 3)
        assert all(tracker.is_sampling(i) for i in range(9))

    def test_invalid_settings(self):
        """测试非法参数"""
        with pytest.raises(ValueError, match="cannot exceed"):
            SampledPositionTracker(3, 5)
        with pytest.raises(ValueError, match="less than 1"):
            SampledPositionTracker(0, 1)

    def test_requires_frequency(self):
        """测试未设置频率时报错"""
        with pytest.raises(ValueError, match="initialize_new_frequency"):
            SampledPositionTracker(3, 3).initialize_new_tracking()

    def test_single_segment_dropped(self, plate):
        """测试只有一段的轨迹不保存"""
        tracker = SampledPositionTracker(1, 1)
        tracker.initialize_new_frequency(FREQUENCY)
        tracker.initialize_new_tracking()
        hit = plate.triangles[0].hit(Ray(Vec3(0.5, -0.5, 1.0), -Vec3.Z), FREQUENCY)
        tracker.add_position(hit)
        tracker.end_current_tracking()
        assert tracker.trackings[FREQUENCY] == []


class TestSimulator:
    """测试单频率射线追踪"""

    def make_simulator(self, model, **kwargs):
        factory = PointSpeakerRayFactory(1, 1.0, model)
        return Simulator(model, factory, **kwargs)

    def test_vertical_ray(self, plate):
        """测试竖直射线经过极点收集器两次"""
        simulator = self.make_simulator(plate)
        collectors = build_collectors(plate, 37)
        ray = Ray(Vec3(0.0, 0.0, 8.0), -Vec3.Z, 1.0)

        reflections = simulator.trace_ray(ray, FREQUENCY, collectors, max_tracking=10)

        assert reflections == 1
        pole = collectors[POLE]
        radius = pole.radius
        c = DEFAULT_CONSTANTS.sound_speed
        times = sorted(pole.energy)
        assert len(times) == 2
        assert times[0] == pytest.approx((4.0 - radius) / c)
        assert times[1] == pytest.approx((8.0 + 4.0 - radius) / c)
        assert pole.total_energy() == pytest.approx(2.0)

    def test_max_tracking_limits_segments(self, plate):
        """测试最大追踪段数"""
        simulator = self.make_simulator(plate)
        collectors = build_collectors(plate, 37)
        simulator.trace_ray(Ray(Vec3(0.0, 0.0, 8.0), -Vec3.Z, 1.0), FREQUENCY, collectors, max_tracking=1)
        assert len(collectors[POLE].energy) == 1

    def test_full_absorption(self, plate):
        """测试完全吸收时反射后停止"""
        simulator = self.make_simulator(plate, absorption=1.0)
        collectors = build_collectors(plate, 37)
        simulator.trace_ray(Ray(Vec3(0.0, 0.0, 8.0), -Vec3.Z, 1.0), FREQUENCY, collectors, max_tracking=10)
        assert collectors[POLE].total_energy() == pytest.approx(1.0)

    def test_partial_absorption(self, plate):
        """测试部分吸收"""
        simulator = self.make_simulator(plate, absorption=0.25)
        collectors = build_collectors(plate, 37)
        simulator.trace_ray(Ray(Vec3(0.0, 0.0, 8.0), -Vec3.Z, 1.0), FREQUENCY, collectors, max_tracking=10)
        assert collectors[POLE].total_energy() == pytest.approx(1.75)

    def test_ray_missing_model(self, plate):
        """测试未命中模型的射线止于球墙"""
        simulator = self.make_simulator(plate)
        collectors = build_collectors(plate, 37)
        reflections = simulator.trace_ray(Ray(Vec3(0.0, 0.0, 8.0), Vec3.Z, 1.0), FREQUENCY, collectors, 10)
        assert reflections == 0
        assert all(c.total_energy() == 0.0 for c in collectors)

    def test_source_outside_wall(self, plate):
        """测试声源在球墙外时报错"""
        constants = DEFAULT_CONSTANTS.with_overrides(sphere_wall_radius=5.0)
        factory = PointSpeakerRayFactory(1, 1.0, plate, constants)
        with pytest.raises(ValueError, match="sphere wall"):
            Simulator(plate, factory, constants=constants)

    def test_run_consumes_factory(self, plate):
        """测试运行消耗全部射线"""
        factory = PointSpeakerRayFactory(3, 9.0, plate)
        simulator = Simulator(plate, factory)
        collectors = build_collectors(plate, 37)
        simulator.run(FREQUENCY, collectors, max_tracking=5, show_progress=False)
        assert not factory.is_ray_available()
        assert sum(c.total_energy() for c in collectors) > 0.0


class TestSceneManager:
    """测试多频率模拟"""

    def test_frequencies_in_order(self, plate):
        """测试按配置顺序处理频率"""
        result = run_simulation(plate, small_properties(frequencies=[1000.0, 250.0]), show_progress=False)
        assert list(result) == [1000.0, 250.0]
        assert all(len(collectors) == 37 for collectors in result.values())

    def test_fresh_collectors_per_frequency(self, plate):
        """测试每个频率使用新的收集器"""
        result = SceneManager(plate, small_properties()).run(show_progress=False)
        first, second = result[500.0], result[1000.0]
        assert all(a is not b for a, b in zip(first, second))
        for a, b in zip(first, second):
            assert a.energy == b.energy

    def test_absorption_reduces_energy(self, plate):
        """测试吸收减少收集能量"""
        reflecting = run_simulation(plate, small_properties(frequencies=[500.0]), show_progress=False)
        absorbing = run_simulation(plate, small_properties(frequencies=[500.0], absorption=1.0),
                                   show_progress=False)
        total_reflecting = sum(c.total_energy() for c in reflecting[500.0])
        total_absorbing = sum(c.total_energy() for c in absorbing[500.0])
        assert 0.0 < total_absorbing < total_reflecting

    def test_tracking(self, plate):
        """测试记录采样射线轨迹"""
        tracker = SampledPositionTracker(3, 3)
        run_simulation(plate, small_properties(frequencies=[500.0], num_of_rays_along_each_axis=3),
                       position_tracker=tracker, show_progress=False)
        trackings = tracker.trackings[500.0]
        assert len(trackings) == 9
        assert all(isinstance(t, RayTracking) for t in trackings)
        assert all(len(t.segments) == 2 for t in trackings)
        assert all(t.segments[0].collision_point.z == pytest.approx(0.0, abs=1e-9) for t in trackings)
        assert all(t.segments[1].collision_point.magnitude() == pytest.approx(DEFAULT_CONSTANTS.sphere_wall_radius)
                   for t in trackings)

    def test_empty_model(self):
        """测试空模型报错"""
        with pytest.raises(ValueError, match="empty"):
            SceneManager(Model(), small_properties())

    def test_prints_progress(self, plate, capsys):
        """测试输出运行信息"""
        run_simulation(plate, small_properties(frequencies=[500.0]), show_progress=False)
        assert "[info] 500 Hz" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
