from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Настройки приложения"""

    # Основные настройки приложения
    app_name: str = "Preorder Cart Service"
    debug: bool = False
    log_level: str = "INFO"

    # Настройки базы данных (хранилище корзин key -> JSON)
    database_url: str = "sqlite:///./preorder_cart.db"

    # Настройки внешних сервисов
    catalog_service_url: str = "http://localhost:5000"
    catalog_timeout: float = 5.0
    order_timeout: float = 30.0

    # Что делать с корзиной после оформления
    checkout_clear_policy: Literal["always", "succeeded_only"] = "always"

    # Настройки Kafka
    kafka_enabled: bool = False
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic_prefix: str = "cart"

    class Config:
        env_file = ".env"
        case_sensitive = False
        # Разрешаем дополнительные поля из переменных окружения
        extra = "ignore"


# Создаем экземпляр настроек
settings = Settings()
