"""Lokasyon yapılandırma tablolarını kurar.

Kullanım:
    python -m data_layer.scripts.setup_aws              # Kur
    python -m data_layer.scripts.setup_aws --delete     # Her şeyi sil
    python -m data_layer.scripts.setup_aws --region eu-west-1  # Farklı region
"""
import sys
import os

# Proje root'unu path'e ekle
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from data_layer.infrastructure.dynamodb_setup import REGION, TABLE_DEFINITIONS, create_tables, delete_tables


def main():
    region = REGION
    delete_mode = False

    # Argümanları parse et
    args = sys.argv[1:]
    for i, arg in enumerate(args):
        if arg == "--delete":
            delete_mode = True
        elif arg == "--region" and i + 1 < len(args):
            region = args[i + 1]

    if delete_mode:
        print("🗑️  DynamoDB tabloları siliniyor...\n")
        delete_tables(region)
        print("\n✅ Tüm tablolar silindi!")
        return

    print("=" * 60)
    print("🚀 AWS Altyapı Kurulumu - Depo Lokasyon Yapılandırıcı")
    print(f"   Region: {region}")
    print("=" * 60)

    print("\n📊 DynamoDB Tabloları")
    print("-" * 40)
    created = create_tables(region)

    print("\n" + "=" * 60)
    print("✅ AWS altyapısı hazır!")
    print(f"   DynamoDB: {len(TABLE_DEFINITIONS)} tablo ({len(created)} yeni)")
    print(f"   Region: {region}")
    print("=" * 60)


if __name__ == "__main__":
    main()
