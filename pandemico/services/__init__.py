"""Сервисы Pandemico: реестр стран, статистика, рассылки."""
