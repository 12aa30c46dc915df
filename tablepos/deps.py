from fastapi import Request

from tablepos.services.runtime import PosRuntime


def get_runtime(request: Request) -> PosRuntime:
    return request.app.state.runtime
