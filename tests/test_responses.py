import pytest

from learnassist import responses
from learnassist.responses import ApiError, ErrorCode


def test_success_envelope():
    resp = responses.success({"a": 1})
    assert resp.status == 200
    assert resp.to_dict() == {"code": 200, "msg": "", "data": {"a": 1}}


def test_success_without_data():
    assert responses.success().to_dict()["data"] is None


def test_success_with_failure_message_keeps_ok_status():
    resp = responses.success_with_failure_message("用户名错误", ErrorCode.RECORD_NOT_FIND)
    assert resp.status == 200
    assert resp.to_dict() == {
        "code": int(ErrorCode.RECORD_NOT_FIND),
        "msg": "用户名错误",
        "data": None,
    }


def test_request_failure_default_code():
    resp = responses.request_failure("创建作业失败")
    assert resp.status == 400
    assert resp.code == ErrorCode.NORMAL_ERROR
    assert resp.to_dict()["msg"] == "创建作业失败"


def test_request_failure_custom_code():
    resp = responses.request_failure("密码错误", ErrorCode.PARAMS_ERROR)
    assert resp.code == ErrorCode.PARAMS_ERROR
    assert resp.status == 400


def test_params_failure():
    resp = responses.params_failure()
    assert resp.to_dict() == {
        "code": int(ErrorCode.PARAMS_ERROR),
        "msg": "参数错误",
        "data": None,
    }
    assert resp.status == 400


def test_auth_failure_has_no_body():
    resp = responses.auth_failure()
    assert resp.status == ErrorCode.NO_AUTH
    assert resp.to_dict() == {}


def test_panic_failure():
    resp = responses.panic_failure("boom")
    assert resp.status == 500
    assert resp.code == ErrorCode.PANIC_ERROR
    assert resp.message == "boom"


def test_api_error_carries_response():
    resp = responses.request_failure("缺少角色参数")
    with pytest.raises(ApiError) as info:
        raise ApiError(resp)
    assert info.value.resp is resp
    assert str(info.value) == "缺少角色参数"
    assert info.value.status == 400
    assert info.value.code == ErrorCode.NORMAL_ERROR


def test_error_code_values_in_envelopes():
    assert responses.request_failure("x", ErrorCode.PARAMS_ERROR).to_dict()["code"] == 111
    assert (
        responses.success_with_failure_message("m", ErrorCode.RECORD_NOT_FIND).to_dict()["code"]
        == 4004
    )
    assert responses.auth_failure().status == 401