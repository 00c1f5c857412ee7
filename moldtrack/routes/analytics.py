from flask import Blueprint, jsonify, request, current_app

from moldtrack.services.analytics_service import get_analytics_service

analytics_bp = Blueprint('analytics', __name__)


@analytics_bp.route('/stats', methods=['GET'])
def estadisticas():
    """Tarjetas del dashboard: total de moldes, en mantenimiento, externos"""
    return jsonify(get_analytics_service().get_stats())


@analytics_bp.route('/mold-status', methods=['GET'])
def distribucion_estados():
    return jsonify(get_analytics_service().get_mold_status_distribution())


@analytics_bp.route('/suppliers', methods=['GET'])
def moldes_por_proveedor():
    return jsonify(get_analytics_service().get_mold_supplier_distribution())


@analytics_bp.route('/maintenance-costs', methods=['GET'])
def costos_mantenimiento():
    return jsonify(get_analytics_service().get_maintenance_costs_over_time())


@analytics_bp.route('/scrap-rate', methods=['GET'])
def tasa_scrap():
    """Tasa de scrap por componente. ?days=N (por defecto SCRAP_RATE_DEFAULT_DAYS)"""
    default_days = current_app.config.get('SCRAP_RATE_DEFAULT_DAYS', 30)
    days = request.args.get('days', default_days, type=int)
    return jsonify(get_analytics_service().get_scrap_rate(days))


@analytics_bp.route('/schedule-adherence', methods=['GET'])
def adherencia_plan():
    return jsonify(get_analytics_service().get_event_schedule_adherence())
