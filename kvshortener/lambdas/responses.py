"""API Gateway (Lambda proxy) response builders shared by all handlers"""

import json

from kvshortener.types import HttpHeaders, LambdaResponse


CORS_HEADERS: HttpHeaders = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
}


def response(status_code: int, body: dict, headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def error_response(status_code: int, base: str, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return response(status_code, body)


def response_200(body: dict) -> LambdaResponse:
    return response(200, body)


def response_302(*, location: str) -> LambdaResponse:
    return response(302, {}, headers={'Location': location})


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(400, 'Bad Request', message, error_code)


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(404, 'Not Found', message, error_code)


def response_409(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(409, 'Conflict', message, error_code)


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(500, 'Internal Server Error', message, error_code)


def response_503(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return error_response(503, 'Service Unavailable', message, error_code)
