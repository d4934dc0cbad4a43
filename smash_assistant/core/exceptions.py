# smash_assistant/core/exceptions.py
"""
本模块定义了 smash-assistant 项目中所有自定义的、语义化的异常类型。

会话核心本身不向调用方抛出异常（所有存储操作都是全函数）；这些异常主要用于
配置校验和外部服务适配层，并在调度器边界被统一转换为可见的助手消息。
"""


class SmashAssistantError(Exception):
    """
    所有 smash-assistant 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    pass


class ConfigurationError(SmashAssistantError):
    """
    表示在加载、解析或验证配置时发生的错误。
    例如，后端地址为空，或配置值格式不正确。
    """

    pass


class BackendNotFoundError(SmashAssistantError, KeyError):
    """
    表示尝试创建一个未注册的后端服务适配器时引发的错误。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """

    pass


class BackendError(SmashAssistantError):
    """
    表示与外部 AI 服务（句子分析、查词、对话）交互时发生的错误。
    例如，网络问题、服务返回错误状态码或响应体格式不正确。
    """

    pass
