"""
Unit tests for WorkflowController
"""
import pytest

from models.baremetal import Hardware
from services.tinkerbell.workflow import WorkflowController, workflow_name_for
from utils.cancellation import CancellationToken


@pytest.fixture
def controller(tink_store):
    return WorkflowController(tink_store)


@pytest.fixture
def ctx():
    return CancellationToken.background()


def test_workflow_name_for():
    """Test name derived from hardware name"""
    assert workflow_name_for("hardware-1") == "hardware-1-workflow"


class TestCreateWorkflow:
    """create_workflow"""

    def test_body(self, controller, tink_api, sample_hardware, ctx):
        """Test workflow references template, hardware and MAC"""
        hw = Hardware.from_object(sample_hardware)
        controller.create_workflow("hardware-1-workflow", "worker-0", hw, ctx)

        stored = tink_api.stored("workflows", "default", "hardware-1-workflow")
        assert stored["spec"]["templateRef"] == "worker-0"
        assert stored["spec"]["hardwareRef"] == "hardware-1"
        assert stored["spec"]["hardwareMap"] == {"device_1": "00:1A:2B:3C:4D:01"}

    def test_existing_accepted(self, controller, tink_api, sample_hardware, ctx):
        """Test existing workflow is returned instead of failing"""
        hw = Hardware.from_object(sample_hardware)
        first = controller.create_workflow("hardware-1-workflow", "worker-0", hw, ctx)
        second = controller.create_workflow("hardware-1-workflow", "worker-0", hw, ctx)

        assert first == second
        assert tink_api.verbs("workflows") == ["create", "create", "get"]


class TestDeleteWorkflow:
    """delete_workflow"""

    def test_delete(self, controller, tink_api, sample_hardware, ctx):
        """Test workflow removed"""
        controller.create_workflow("hardware-1-workflow", "worker-0", Hardware.from_object(sample_hardware), ctx)
        controller.delete_workflow("hardware-1-workflow", "default", ctx)
        assert tink_api.stored("workflows", "default", "hardware-1-workflow") is None

    def test_delete_absent(self, controller, ctx):
        """Test missing workflow is not an error"""
        controller.delete_workflow("hardware-1-workflow", "default", ctx)
